from time import sleep

import pytest

from cattle_tracker.utils.profiler import profile_block


def test_profile_block_measures_time():
    with profile_block("sleep") as stats:
        sleep(0.05)
    assert stats.duration_seconds >= 0.05
    assert stats.as_log_extra()["step"] == "sleep"


def test_profile_block_records_duration_on_failure():
    with pytest.raises(RuntimeError):
        with profile_block("boom") as stats:
            raise RuntimeError("boom")
    assert stats.end_ts >= stats.start_ts
    assert stats.start_rss_bytes is None or stats.start_rss_bytes > 0
