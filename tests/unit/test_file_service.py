"""Tests for file services."""
import os
import tempfile
from pathlib import Path

import pytest

from chunkupload.core.exceptions import ReadError
from chunkupload.core.upload.protocols import FileHandleProtocol
from chunkupload.core.upload.services import BytesFileHandle, FileValidator, LocalFileHandle


class TestFileValidator:
    """Test suite for FileValidator."""

    @pytest.fixture
    def validator(self):
        """Create validator instance."""
        return FileValidator()

    @pytest.fixture
    def temp_file(self):
        """Create temporary file for testing."""
        fd, path = tempfile.mkstemp()
        os.write(fd, b"test content")
        os.close(fd)
        yield Path(path)
        os.unlink(path)

    def test_validate_existing_file(self, validator, temp_file):
        path, size = validator.validate(temp_file)

        assert path == temp_file
        assert size == 12

    def test_validate_string_path(self, validator, temp_file):
        path, _ = validator.validate(str(temp_file))
        assert path == temp_file

    def test_validate_nonexistent_file(self, validator):
        with pytest.raises(FileNotFoundError):
            validator.validate(Path("/nonexistent/file.txt"))

    def test_validate_directory(self, validator):
        with pytest.raises(ValueError):
            validator.validate(Path(tempfile.gettempdir()))

    def test_validate_size_empty(self, validator):
        """Test empty file raises error."""
        with pytest.raises(ValueError) as exc_info:
            validator.validate_size(0)

        assert str(exc_info.value) == "Cannot upload empty file"

    def test_validate_size_exceeds_max(self, validator):
        with pytest.raises(ValueError, match="limit"):
            validator.validate_size(2000, max_size=1000)


class TestLocalFileHandle:
    """Test suite for LocalFileHandle."""

    @pytest.fixture
    def temp_file(self):
        """Create temporary file with known content."""
        fd, path = tempfile.mkstemp(suffix=".bin")
        os.write(fd, b"0123456789ABCDEFGHIJ")  # 20 bytes
        os.close(fd)
        yield Path(path)
        if os.path.exists(path):
            os.unlink(path)

    def test_implements_protocol(self, temp_file):
        assert isinstance(LocalFileHandle(temp_file), FileHandleProtocol)

    def test_name_and_size(self, temp_file):
        handle = LocalFileHandle(temp_file)

        assert handle.name == temp_file.name
        assert handle.size == 20

    def test_custom_name(self, temp_file):
        assert LocalFileHandle(temp_file, name="report.pdf").name == "report.pdf"

    @pytest.mark.asyncio
    async def test_stream_blocks(self, temp_file):
        """Test streaming yields the whole file in block_size pieces."""
        handle = LocalFileHandle(temp_file, block_size=8)
        blocks = [block async for block in handle.stream()]

        assert [len(b) for b in blocks] == [8, 8, 4]
        assert b"".join(blocks) == b"0123456789ABCDEFGHIJ"

    @pytest.mark.asyncio
    async def test_read_range(self, temp_file):
        handle = LocalFileHandle(temp_file)
        assert await handle.read_range(5, 15) == b"56789ABCDE"

    @pytest.mark.asyncio
    async def test_read_range_with_open_handle(self, temp_file):
        """Test range reads reuse the handle from open_file()."""
        handle = LocalFileHandle(temp_file)
        await handle.open_file()
        try:
            assert await handle.read_range(0, 10) == b"0123456789"
            assert await handle.read_range(10, 20) == b"ABCDEFGHIJ"
        finally:
            await handle.close_file()

    @pytest.mark.asyncio
    async def test_short_read(self, temp_file):
        """Test reading past the end raises ReadError."""
        handle = LocalFileHandle(temp_file)

        with pytest.raises(ReadError):
            await handle.read_range(15, 30)

    @pytest.mark.asyncio
    async def test_file_removed_after_open(self, temp_file):
        """Test a file deleted before streaming raises ReadError."""
        handle = LocalFileHandle(temp_file)
        os.unlink(temp_file)

        with pytest.raises(ReadError):
            async for _ in handle.stream():
                pass

        with pytest.raises(ReadError):
            await handle.read_range(0, 5)

    @pytest.mark.asyncio
    async def test_close_without_open(self, temp_file):
        await LocalFileHandle(temp_file).close_file()


class TestBytesFileHandle:
    """Test suite for BytesFileHandle."""

    def test_implements_protocol(self):
        assert isinstance(BytesFileHandle(b"abc", "a.txt"), FileHandleProtocol)

    @pytest.mark.asyncio
    async def test_stream_and_read(self):
        handle = BytesFileHandle(b"hello world", "hello.txt", block_size=4)

        blocks = [block async for block in handle.stream()]
        assert blocks == [b"hell", b"o wo", b"rld"]
        assert await handle.read_range(6, 11) == b"world"
        assert handle.size == 11

    @pytest.mark.asyncio
    async def test_read_out_of_range(self):
        handle = BytesFileHandle(b"abc", "a.txt")
        with pytest.raises(ReadError):
            await handle.read_range(1, 10)
