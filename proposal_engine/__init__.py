"""
Proposal Engine

Automated SEO proposal generation:
1. Researches a prospect with Claude and live search-engine data
2. Synthesizes research into structured proposal content
3. Renders the proposal as PDF or HTML
4. Streams progress to the browser while it works
"""

__version__ = "0.1.0"
