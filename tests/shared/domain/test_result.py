from shared.result import ServiceResult


class TestServiceResult:
    def test_ok_carries_data_and_message(self):
        result = ServiceResult.ok([1, 2], "Fetched")
        assert result.success is True
        assert result.data == [1, 2]
        assert result.message == "Fetched"
        assert result.degraded is False

    def test_failure_is_not_degraded(self):
        result = ServiceResult.failure("Invalid discount code", status_code=400)
        assert result.success is False
        assert result.degraded is False
        assert result.status_code == 400
        assert result.data is None

    def test_unavailable_is_degraded(self):
        result = ServiceResult.unavailable("Failed to fetch cart")
        assert result.success is False
        assert result.degraded is True

    def test_map_transforms_successful_payload(self):
        assert ServiceResult.ok(2).map(lambda value: value * 10).data == 20

    def test_map_leaves_failure_untouched(self):
        failure = ServiceResult.failure("nope")
        assert failure.map(lambda value: value * 10) is failure
