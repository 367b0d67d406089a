"""Core of fastlane-desk: domain, configuration, errors and services."""
