"""Known fastlane lanes.

This module lists the lanes the generated Fastfile conventions ship with.
Keeping it in the domain layer lets the CLI offer a menu without turning it
into an allow-list: the lane runner accepts any name, because custom lanes
are a legitimate use case.
"""

from __future__ import annotations

from enum import Enum


class KnownLane(str, Enum):
    """Lanes offered by default. Not exhaustive."""

    VALIDATE_CONFIG = "validate_config"
    DEV = "dev"
    DIS = "dis"
    STAGING = "staging"
    PROD = "prod"
    RELEASE_TESTFLIGHT = "release_testflight"
    RELEASE_APPSTORE = "release_appstore"
    SNAPSHOT_CAPTURE = "snapshot_capture"
    METADATA_SYNC = "metadata_sync"
    CI_SETUP = "ci_setup"
    CI_BUILD_DEV = "ci_build_dev"
    CI_BUILD_DIS = "ci_build_dis"

    @classmethod
    def is_known(cls, name: str) -> bool:
        return name in {lane.value for lane in cls}

    def description(self) -> str:
        """Human readable one-liner for menus."""

        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[KnownLane, str] = {
    KnownLane.VALIDATE_CONFIG: "Check the generated .env.fastlane values",
    KnownLane.DEV: "Build the development scheme",
    KnownLane.DIS: "Build the distribution scheme",
    KnownLane.STAGING: "Build and upload a staging build",
    KnownLane.PROD: "Build a production archive",
    KnownLane.RELEASE_TESTFLIGHT: "Archive and upload to TestFlight",
    KnownLane.RELEASE_APPSTORE: "Archive and submit to the App Store",
    KnownLane.SNAPSHOT_CAPTURE: "Capture App Store screenshots",
    KnownLane.METADATA_SYNC: "Sync App Store metadata",
    KnownLane.CI_SETUP: "Prepare keychain and signing on CI",
    KnownLane.CI_BUILD_DEV: "CI build of the development scheme",
    KnownLane.CI_BUILD_DIS: "CI build of the distribution scheme",
}
