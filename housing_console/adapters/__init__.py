"""Adapters to the outside world (remote housing API)."""
