# ABOUTME: Data extraction from the content platform
# ABOUTME: Fetching, selector-chain parsing, Markdown conversion and album link harvesting

"""
Extraction Layer: Get article data out of platform pages

This layer handles:
- Document fetching with rotating identities and transport retries
- Field extraction through ordered selector-fallback chains
- Markup to Markdown conversion with image filtering
- Album link discovery (browser harvesting or static scan)

Data Flow: Platform pages → ParsedArticle / LinkSet → core orchestration
"""
