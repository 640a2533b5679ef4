"""Services: process invocation, git, store, config resolution, promotion workflow."""
