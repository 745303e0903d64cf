"""
OAuth: authorization URL, code exchange and client credentials
"""
import asyncio
from vimeopy import VimeoClient

CLIENT_ID = "your_client_id"
CLIENT_SECRET = "your_client_secret"
REDIRECT_URI = "https://example.com/callback"


async def main():
    async with VimeoClient(CLIENT_ID, CLIENT_SECRET) as vimeo:

        # Send the user here; Vimeo redirects back with ?code=...
        url = vimeo.build_authorization_endpoint(REDIRECT_URI, ['public', 'upload'], state='xyz')
        print(f"Authorize at: {url}")

        code = input("Code: ")
        response = await vimeo.exchange_code(code, REDIRECT_URI)
        vimeo.set_access_token(response.body['access_token'])
        print(f"Authenticated as {response.body['user']['name']}")

        # Unauthenticated token for public data
        response = await vimeo.generate_client_credentials('public')
        print(f"Client credentials token scope: {response.body['scope']}")


if __name__ == "__main__":
    asyncio.run(main())
