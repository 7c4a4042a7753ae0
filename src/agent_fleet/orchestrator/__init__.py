"""Fleet orchestration components.

- workspace discovery
- adapters for git, the beads issue tracker and tmux
- merge-queue submission
- supervisory session startup
"""
