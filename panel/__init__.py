"""Ambassador program admin panel backend."""
