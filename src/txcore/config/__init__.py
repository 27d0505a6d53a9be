"""txcore configuration property classes."""
