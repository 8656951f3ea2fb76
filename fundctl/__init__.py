"""fundctl - command line client for the fund tracker API."""
