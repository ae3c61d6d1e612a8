"""Static site generator for multi-chapter books authored as Notion pages."""

__version__ = "0.1.0"
