"""
Upload a video and wait for its URI
"""
import asyncio
from vimeopy import VimeoClient, Credentials, setup_logging


async def main():
    setup_logging()
    credentials = Credentials.from_file("config.json")

    async with VimeoClient.from_credentials(credentials) as vimeo:
        params = {
            'name': 'vimeopy test upload',
            'description': "This video was uploaded through vimeopy."
        }

        def on_progress(bytes_uploaded, bytes_total):
            pct = bytes_uploaded / bytes_total * 100
            print(f"{bytes_uploaded} / {bytes_total} ({pct:.2f}%)")

        # No on_complete/on_error: the call returns the URI or raises
        uri = await vimeo.upload("video.mp4", params, on_progress)
        print(f"Your video URI is: {uri}")

        # Edit the video after upload
        await vimeo.request({
            'method': 'PATCH',
            'path': uri,
            'query': {'name': 'vimeopy edited title'}
        })

        metadata = await vimeo.request(f"{uri}?fields=link")
        print(f"The file has been uploaded to {metadata.body['link']}")

        # Content-Range streaming instead of tus
        uri = await vimeo.upload("video.mp4", params, strategy='streaming')
        print(f"Streamed upload: {uri}")


if __name__ == "__main__":
    asyncio.run(main())
