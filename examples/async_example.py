"""
Async Client Example

Concurrent enrollment lookups with asyncio.gather.
"""

import asyncio

from visa_sdk import AsyncVisaClient, ClientConfig, safe_call_async


async def main():
    async with AsyncVisaClient(ClientConfig.from_env()) as client:
        user_keys = ["user-1", "user-2", "user-3"]

        results = await asyncio.gather(
            *(safe_call_async(client.get_user, user_key) for user_key in user_keys)
        )

        for user_key, result in zip(user_keys, results):
            if result.ok:
                print(f"✓ {user_key}: {result.value}")
            else:
                print(f"✗ {user_key}: {result.error}")


if __name__ == "__main__":
    asyncio.run(main())
