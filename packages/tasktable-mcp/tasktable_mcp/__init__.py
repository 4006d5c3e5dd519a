"""
tasktable MCP server package.
"""
