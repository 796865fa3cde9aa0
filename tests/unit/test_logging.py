"""Tests for logging helpers."""
import logging
from unittest.mock import AsyncMock, Mock

import pytest

from chunkupload import BytesFileHandle, ErrorKind, NegotiationError, UploadCoordinator, setup_logging
from chunkupload.core.logging import get_logger


class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_levels(self):
        names = ['chunkupload', 'chunkupload.api', 'chunkupload.upload.coordinator']
        saved = {name: logging.getLogger(name).level for name in names}
        yield
        for name, level in saved.items():
            logging.getLogger(name).setLevel(level)

    def test_get_logger_propagates(self):
        logger = get_logger('chunkupload.api')

        assert logger.name == 'chunkupload.api'
        assert logger.propagate

    def test_get_logger_namespaces_component(self):
        assert get_logger('upload.chunk').name == 'chunkupload.upload.chunk'

    def test_setup_logging_sets_levels(self):
        setup_logging(logging.DEBUG)

        assert logging.getLogger('chunkupload').level == logging.DEBUG
        assert logging.getLogger('chunkupload.upload.coordinator').level == logging.DEBUG

    @pytest.mark.asyncio
    async def test_failure_logged(self, caplog):
        """Test a failed upload is logged at ERROR with its kind."""
        negotiator = Mock()
        negotiator.negotiate = AsyncMock(side_effect=NegotiationError(
            "Server error. Please try again later", kind=ErrorKind.SERVER_ERROR, status=503
        ))
        coordinator = UploadCoordinator(api_client=Mock(), negotiator=negotiator)

        with caplog.at_level(logging.ERROR, logger='chunkupload.upload.coordinator'):
            with pytest.raises(NegotiationError):
                await coordinator.upload(BytesFileHandle(b"abc", "a.txt"))

        assert "server_error" in caplog.text
        assert "negotiating" in caplog.text
