"""
Logging backends. Each backend module exposes a build_backend factory
taking a BackendContext.
"""

__all__ = [
    "flow_logging",
    "flow_xml",
    "top_talkers",
]
