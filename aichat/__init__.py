"""aichat: terminal LLM chat with paced streaming output."""

__version__ = "0.4.0"
