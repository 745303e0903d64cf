"""
Make API requests
"""
import asyncio
from vimeopy import VimeoClient, Credentials


async def main():
    credentials = Credentials.from_file("config.json")

    async with VimeoClient.from_credentials(credentials) as vimeo:

        # GET with a path
        me = await vimeo.request("/me")
        print(f"Authenticated as: {me.body['name']}")

        # Query parameters and paging
        videos = await vimeo.request({
            'path': '/me/videos',
            'query': {'per_page': 5, 'fields': 'uri,name'}
        })
        for video in videos.body.get('data', []):
            print(f"{video['uri']}: {video['name']}")

        # Search
        results = await vimeo.request({
            'path': '/videos',
            'query': {'query': 'vimeo staff', 'per_page': 3}
        })
        print(f"Found {results.body.get('total', 0)} videos")


if __name__ == "__main__":
    asyncio.run(main())
