"""mentionhook: mention-triggered GitLab actions for chat rooms."""

__version__ = "0.1.0"
