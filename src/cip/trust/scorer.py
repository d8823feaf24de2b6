"""Location consistency scoring.

Four independent checks, one point each, starting at zero:

1. device vs network country agreement (skipped when either code is missing)
2. timezone region vs network country
3. primary language vs network country
4. a baseline point

VPN and datacenter detection never touch the score; they are appended as
separate flags by ``with_network_flags``. The result is a triage signal only.
"""

from __future__ import annotations

from typing import Optional, Sequence

from cip.models import TrustAssessment


MAX_SCORE = 4

FLAG_GPS_IP_MISMATCH = "gps_ip_country_mismatch"
FLAG_TIMEZONE_MISMATCH = "timezone_mismatch"
FLAG_LANGUAGE_MISMATCH = "language_mismatch"
FLAG_VPN = "vpn_detected"
FLAG_DATACENTER = "datacenter_ip"

# Placeholder heuristic tables. Intentionally coarse.
TIMEZONE_COUNTRY_HINTS: dict[str, frozenset[str]] = {
    "America": frozenset({"US", "CA", "MX", "BR", "AR"}),
    "Europe": frozenset({"GB", "DE", "FR", "IT", "ES", "NL", "PL"}),
    "Asia": frozenset({"IN", "CN", "JP", "KR", "SG", "ID", "TH"}),
    "Australia": frozenset({"AU", "NZ"}),
    "Africa": frozenset({"ZA", "NG", "EG", "KE"}),
}

LANGUAGE_COUNTRY_HINTS: dict[str, frozenset[str]] = {
    "en-US": frozenset({"US"}),
    "en-GB": frozenset({"GB"}),
    "en-IN": frozenset({"IN"}),
    "de": frozenset({"DE", "AT", "CH"}),
    "fr": frozenset({"FR", "CA", "BE"}),
    "es": frozenset({"ES", "MX", "AR"}),
    "pt": frozenset({"PT", "BR"}),
    "ja": frozenset({"JP"}),
    "zh": frozenset({"CN", "TW", "HK"}),
    "ko": frozenset({"KR"}),
}


def expected_countries_for_timezone(timezone: Optional[str]) -> frozenset[str]:
    """Countries plausible for the leading region of an IANA zone name."""
    if not timezone:
        return frozenset()
    region = timezone.split("/", 1)[0]
    return TIMEZONE_COUNTRY_HINTS.get(region, frozenset())


def expected_countries_for_language(languages: Sequence[str]) -> frozenset[str]:
    """Countries plausible for the first language tag (exact, then bare subtag)."""
    if not languages:
        return frozenset()
    full_tag = languages[0]
    if full_tag in LANGUAGE_COUNTRY_HINTS:
        return LANGUAGE_COUNTRY_HINTS[full_tag]
    primary = full_tag.split("-", 1)[0]
    return LANGUAGE_COUNTRY_HINTS.get(primary, frozenset())


def score_consistency(
    network_country_code: Optional[str],
    device_country_code: Optional[str],
    timezone: Optional[str],
    languages: Sequence[str],
) -> TrustAssessment:
    """Score agreement between derived locations and reported signals."""
    network_cc = _normalize_code(network_country_code)
    device_cc = _normalize_code(device_country_code)
    flags: set[str] = set()
    score = 0

    if device_cc and network_cc:
        if device_cc == network_cc:
            score += 1
        else:
            flags.add(FLAG_GPS_IP_MISMATCH)
    else:
        score += 1

    score += _hint_check(
        network_cc, expected_countries_for_timezone(timezone), FLAG_TIMEZONE_MISMATCH, flags
    )
    score += _hint_check(
        network_cc, expected_countries_for_language(languages), FLAG_LANGUAGE_MISMATCH, flags
    )

    # Baseline point
    score += 1

    return TrustAssessment(score=score, flags=frozenset(flags))


def with_network_flags(
    assessment: TrustAssessment,
    is_vpn: bool,
    is_datacenter: bool,
) -> TrustAssessment:
    """Append VPN/datacenter flags without changing the score."""
    flags = set(assessment.flags)
    if is_vpn:
        flags.add(FLAG_VPN)
    if is_datacenter:
        flags.add(FLAG_DATACENTER)
    return TrustAssessment(score=assessment.score, flags=frozenset(flags))


def _hint_check(
    network_cc: Optional[str],
    expected: frozenset[str],
    flag: str,
    flags: set[str],
) -> int:
    if not network_cc or not expected:
        return 1
    if network_cc in expected:
        return 1
    flags.add(flag)
    return 0


def _normalize_code(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = value.strip().upper()
    return value or None
