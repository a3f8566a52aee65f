"""Fraction Quest: a fraction practice game with a pygame UI."""
