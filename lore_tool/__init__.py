"""TrackLore command-line tool."""
