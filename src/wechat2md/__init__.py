# ABOUTME: wechat2md package root
# ABOUTME: Extracts Official Account articles and albums into Markdown documents

__version__ = "0.1.0"
