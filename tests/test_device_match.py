from leaksync.core.device_match import best_profile_for_fingerprint, fingerprint_from_metadata, match_score
from leaksync.core.model import DeviceProfile, Fingerprint


def _profile(profile_id: str, *fingerprints: Fingerprint) -> DeviceProfile:
    return DeviceProfile(id=profile_id, name=profile_id, fingerprints=fingerprints, parameters=())


def test_match_score_prefers_exact_fingerprint() -> None:
    profile = _profile("zse42", Fingerprint(0x027A, 0x7000, 0xE002))
    assert match_score(Fingerprint(0x027A, 0x7000, 0xE002), profile) == 3
    assert match_score(Fingerprint(0x027A, 0x7000, 0xE001), profile) == 2
    assert match_score(Fingerprint(0x027A, 0x0001, 0xE002), profile) == 1
    assert match_score(Fingerprint(0x0086, 0x7000, 0xE002), profile) == 0


def test_best_profile_prefers_product_type_over_manufacturer_only() -> None:
    vendor = _profile("vendor", Fingerprint(0x027A, 0x0001, 0x0001))
    family = _profile("family", Fingerprint(0x027A, 0x7000, 0x0001))

    picked = best_profile_for_fingerprint(Fingerprint(0x027A, 0x7000, 0xE002), {"vendor": vendor, "family": family})
    assert picked is not None
    assert picked.id == "family"


def test_no_match_returns_none() -> None:
    profile = _profile("zse42", Fingerprint(0x027A, 0x7000, 0xE002))
    assert best_profile_for_fingerprint(Fingerprint(0, 0, 0), {"zse42": profile}) is None


def test_fingerprint_from_metadata() -> None:
    metadata = {"manufacturer": "027A", "deviceType": "7000", "deviceId": "E002"}
    assert fingerprint_from_metadata(metadata) == Fingerprint(0x027A, 0x7000, 0xE002)
    assert fingerprint_from_metadata({"manufacturer": "027A"}) is None
