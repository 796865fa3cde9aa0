"""
Upload files with progress, error reporting and cancellation
"""
import asyncio
import logging

from chunkupload import APIConfig, CancellationToken, RetryConfig, UploadClient, UploadException, setup_logging


async def main():
    logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s %(message)s")
    setup_logging(logging.INFO)

    config = APIConfig(
        base_url="https://files.example.com/",
        cookies={"sessionid": "..."},
        retry=RetryConfig(max_retries=3)
    )

    async with UploadClient(config=config) as client:

        # Check quota first
        quota = await client.get_quota()
        print(quota)

        # Simple upload
        result = await client.upload("document.pdf")
        print(f"Uploaded: {result.file_name} (id {result.upload_id}, crc32 {result.checksum})")

        # Upload with custom name and progress callback
        def on_progress(snapshot):
            print(f"{snapshot.state.value}: {snapshot.percent:.1f}% {snapshot.status_message or ''}")

        def on_error(kind, message):
            print(f"Failed ({kind.value}): {message}")

        result = await client.upload(
            "photo.jpg",
            name="vacation_2024.jpg",
            progress_callback=on_progress,
            error_callback=on_error
        )

        # Cancel a long upload after ten seconds
        token = CancellationToken()
        task = asyncio.create_task(client.upload("large_file.zip", cancel_token=token))
        await asyncio.sleep(10)
        token.cancel("took too long")
        try:
            await task
        except UploadException as e:
            print(f"Stopped: {e.message}")


if __name__ == "__main__":
    asyncio.run(main())
