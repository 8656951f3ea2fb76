"""Web dashboard for the fund tracker."""
