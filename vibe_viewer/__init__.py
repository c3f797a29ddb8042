"""
Vibe Viewer - Real-time trading feed dashboard.

Architecture:
- datafeed/: Feed connection (websocket or simulated) and wire decoding
- engine/: Bounded buffers and the stream state synchronizer
- ui/: Dashboard rendering from state snapshots (Textual TUI)
"""

__version__ = "0.1.0"
