"""
Replace the source file of an existing video
"""
import asyncio
import sys
from vimeopy import VimeoClient, Credentials, VimeoException


async def main(video_uri: str):
    credentials = Credentials.from_file("config.json")

    async with VimeoClient.from_credentials(credentials) as vimeo:
        with open("new_version.mp4", "rb") as f:
            try:
                uri = await vimeo.replace(f, video_uri)
            except VimeoException as e:
                print(f"Replace failed: {e}")
                return

        print(f"New version uploaded for {uri}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "/videos/123456"))
