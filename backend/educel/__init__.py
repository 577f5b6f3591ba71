"""Educel — personalised micro-learning generation backend."""
