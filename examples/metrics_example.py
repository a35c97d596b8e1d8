"""
Prometheus Metrics Example

The SDK records request counts and latency in the default prometheus_client
registry; expose it from the host application.
"""

import time

from prometheus_client import start_http_server

from visa_sdk import ClientConfig, VisaClient, safe_call
from visa_sdk.logging_setup import setup_structured_logger


def main():
    setup_structured_logger()
    start_http_server(9100)

    client = VisaClient(ClientConfig.from_env())

    while True:
        result = safe_call(client.hello_world)
        print("ok" if result.ok else f"failed: {result.error}")
        time.sleep(30)


if __name__ == "__main__":
    main()
