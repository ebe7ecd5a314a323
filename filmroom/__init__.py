"""Film-grading play import engine."""
