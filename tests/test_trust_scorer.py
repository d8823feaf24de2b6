import itertools

from cip.trust.scorer import (
    FLAG_DATACENTER,
    FLAG_GPS_IP_MISMATCH,
    FLAG_LANGUAGE_MISMATCH,
    FLAG_TIMEZONE_MISMATCH,
    FLAG_VPN,
    expected_countries_for_language,
    expected_countries_for_timezone,
    score_consistency,
    with_network_flags,
)


def test_all_signals_agree_scores_four_without_flags():
    result = score_consistency("DE", "DE", "Europe/Berlin", ["de-DE", "en"])
    assert result.score == 4
    assert result.flags == frozenset()


def test_missing_device_country_skips_geo_check():
    result = score_consistency("DE", None, "Europe/Berlin", ["de"])
    assert result.score == 4
    assert FLAG_GPS_IP_MISMATCH not in result.flags


def test_device_network_mismatch_raises_flag():
    result = score_consistency("DE", "FR", "Europe/Berlin", ["de"])
    assert result.score == 3
    assert result.flags == frozenset({FLAG_GPS_IP_MISMATCH})


def test_device_country_without_network_country_is_not_a_mismatch():
    result = score_consistency(None, "FR", "Europe/Paris", ["fr"])
    assert result.score == 4
    assert result.flags == frozenset()


def test_timezone_region_mismatch():
    result = score_consistency("US", None, "Europe/Paris", ["en-US"])
    assert result.score == 3
    assert result.flags == frozenset({FLAG_TIMEZONE_MISMATCH})


def test_unmapped_timezone_region_awards_point():
    result = score_consistency("NZ", None, "Pacific/Auckland", [])
    assert result.score == 4
    assert result.flags == frozenset()


def test_language_mismatch_uses_bare_subtag():
    result = score_consistency("JP", None, "Asia/Tokyo", ["fr-FR"])
    assert result.score == 3
    assert result.flags == frozenset({FLAG_LANGUAGE_MISMATCH})


def test_exact_language_tag_wins_over_subtag():
    assert expected_countries_for_language(["en-GB"]) == frozenset({"GB"})
    assert expected_countries_for_language(["en-AU"]) == frozenset()
    result = score_consistency("US", None, "America/New_York", ["en-GB"])
    assert result.flags == frozenset({FLAG_LANGUAGE_MISMATCH})


def test_only_first_language_counts():
    result = score_consistency("DE", None, "Europe/Berlin", ["ja", "de"])
    assert FLAG_LANGUAGE_MISMATCH in result.flags


def test_timezone_lookup_uses_leading_segment():
    assert "IN" in expected_countries_for_timezone("Asia/Kolkata")
    assert expected_countries_for_timezone("UTC") == frozenset()
    assert expected_countries_for_timezone(None) == frozenset()


def test_worst_case_keeps_baseline_point():
    result = score_consistency("BR", "AR", "Asia/Tokyo", ["ko"])
    assert result.score == 1
    assert result.flags == frozenset(
        {FLAG_GPS_IP_MISMATCH, FLAG_TIMEZONE_MISMATCH, FLAG_LANGUAGE_MISMATCH}
    )


def test_score_is_bounded_and_deterministic():
    codes = [None, "US", "DE", "JP", "BR"]
    zones = [None, "America/Chicago", "Europe/Madrid", "Asia/Seoul", "Etc/UTC"]
    languages = [[], ["en-US"], ["de"], ["pt-BR"], ["xx"]]
    for network, device, zone, langs in itertools.product(codes, codes, zones, languages):
        first = score_consistency(network, device, zone, langs)
        second = score_consistency(network, device, zone, langs)
        assert 0 <= first.score <= 4
        assert first == second


def test_country_codes_are_case_insensitive():
    result = score_consistency("de", "DE", "Europe/Berlin", ["de"])
    assert result.score == 4


def test_network_flags_do_not_change_score():
    base = score_consistency("DE", None, "Europe/Berlin", ["de"])
    flagged = with_network_flags(base, is_vpn=True, is_datacenter=True)
    assert flagged.score == base.score
    assert flagged.flags == frozenset({FLAG_VPN, FLAG_DATACENTER})
    assert with_network_flags(base, False, False).flags == frozenset()
