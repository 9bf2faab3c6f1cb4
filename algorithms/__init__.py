"""
Sample algorithms loadable by the host (by file path or dotted name).
"""
