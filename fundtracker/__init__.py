"""VC fund tracker: investments, exits and the API that serves them."""
