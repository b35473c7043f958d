"""kubemirror: live, watch-synchronized mirrors of Kubernetes resource collections."""

__version__ = "0.1.0"
