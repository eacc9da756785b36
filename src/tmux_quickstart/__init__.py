"""
tmux-quickstart - declarative tmux sessions from a plain text config.
"""

__version__ = "0.1.0"
