"""Test package for Fraction Quest.

Core modules are tested without pygame.  Engine simulations use a
``FakeClock`` and drive the scheduler explicitly, and the UI smoke tests run
under pygame's dummy SDL drivers.  Run ``pytest`` from the project root.
"""
