"""Client-side model of a remote stash: items, tabs and the session that loads them."""
