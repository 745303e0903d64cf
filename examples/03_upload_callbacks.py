"""
Upload with callbacks and abort a running upload
"""
import asyncio
from vimeopy import VimeoClient, Credentials, UploadHandle


async def main():
    credentials = Credentials.from_file("config.json")

    async with VimeoClient.from_credentials(credentials) as vimeo:

        # Callback mode: returns None once a terminal callback fired
        await vimeo.upload(
            "video.mp4",
            {'name': 'Uploaded with callbacks'},
            lambda uri: print(f"Complete: {uri}"),
            lambda sent, total: print(f"{sent / total:.0%}"),
            lambda error: print(f"Failed: {error}")
        )

        # Abort after five seconds
        handle = UploadHandle()
        upload = asyncio.create_task(vimeo.upload(
            "large_video.mp4",
            on_complete=lambda uri: print(f"Complete: {uri}"),
            on_error=lambda error: print(f"Failed: {error}"),
            on_cancel=lambda: print("Upload cancelled"),
            handle=handle
        ))
        await asyncio.sleep(5)
        handle.abort()
        await upload


if __name__ == "__main__":
    asyncio.run(main())
