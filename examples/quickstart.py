"""
Visa SDK Quickstart Example
"""

import os

from visa_sdk import ClientConfig, RemoteError, VisaClient


def main():
    # Certificate, key and credentials come from VISA_API_* variables
    config = ClientConfig.from_env(debug=True)

    client = VisaClient(config)

    print("Checking connectivity...")
    hello = client.hello_world()
    print(f"✓ Hello World: {hello}")

    user_key = os.getenv("VISA_USER_KEY", "user-12345")
    print(f"\nLooking up enrollment record for {user_key}...")
    try:
        record = client.get_user(user_key)
        print(f"✓ Enrollment record: {record}")
    except RemoteError as e:
        print(f"✗ Lookup failed ({e.status_code} {e.status_text}): {e.body}")

    print("\n✓ Quickstart complete!")


if __name__ == "__main__":
    main()
