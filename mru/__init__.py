"""mru: update a dependency across a fleet of repositories."""
