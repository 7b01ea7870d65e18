"""Configuration of a release run: CLI, environment, configuration file."""
