"""Manufacturer report to profile matching logic."""

from __future__ import annotations

from leaksync.core.model import DeviceProfile, Fingerprint


def match_score(fingerprint: Fingerprint, profile: DeviceProfile) -> int:
    best = 0
    for candidate in profile.fingerprints:
        if candidate.manufacturer_id != fingerprint.manufacturer_id:
            continue
        score = 1
        if candidate.product_type_id == fingerprint.product_type_id:
            score = 2
            if candidate.product_id == fingerprint.product_id:
                score = 3
        best = max(best, score)
    return best


def best_profile_for_fingerprint(
    fingerprint: Fingerprint,
    profiles: dict[str, DeviceProfile],
) -> DeviceProfile | None:
    best: DeviceProfile | None = None
    best_score = 0
    for profile in profiles.values():
        score = match_score(fingerprint, profile)
        if score > best_score:
            best = profile
            best_score = score
    return best


def fingerprint_from_metadata(metadata: dict[str, str]) -> Fingerprint | None:
    try:
        return Fingerprint(
            manufacturer_id=int(metadata["manufacturer"], 16),
            product_type_id=int(metadata["deviceType"], 16),
            product_id=int(metadata["deviceId"], 16),
        )
    except (KeyError, ValueError):
        return None
