"""
Message Level Encryption Example

Add Card and Enroll User bodies carry card numbers; pass encrypt=True to
send them in an MLE envelope. Initialize MLE once with the key id and
server key Visa issued for your project.
"""

import os

from visa_sdk import ClientConfig, VisaClient


def main():
    client = VisaClient(ClientConfig.from_env())

    with open(os.environ["VISA_MLE_SERVER_CERT"]) as fh:
        server_key = fh.read()

    client.init_mle(os.environ["VISA_MLE_KEY_ID"], server_key)

    user_key = "user-12345"
    card = {"cardNumber": os.getenv("VISA_TEST_CARD", "4111111111111111")}

    print("Enrolling user (encrypted)...")
    print(client.enroll_user(user_key, card, encrypt=True))

    print("\nAdding a second card (encrypted)...")
    print(client.add_card(user_key, {"cardNumber": "4000000000000002"}, encrypt=True))

    print("\nUnenrolling user...")
    print(client.unenroll_user(user_key))


if __name__ == "__main__":
    print("MLE Example")
    print("=" * 50)
    print("\nSetup Instructions:")
    print("1. Create an MLE key in the Visa Developer project")
    print("2. Download the server encryption certificate")
    print("3. Set VISA_MLE_KEY_ID and VISA_MLE_SERVER_CERT")
    print("\n" + "=" * 50)

    # main()  # Uncomment when MLE credentials are configured
