"""
Usage Examples for SimpleHttp
Demonstrates requests, profiles and configuration
"""

import logging

import simplehttp
from simplehttp import (
    ClientConfig,
    ConfigLoader,
    InvalidArgumentsError,
    SimpleHttp,
)


# =============================================================================
# Example 1: Simple GET with query parameters
# =============================================================================

def get_example() -> None:
    """Issue a GET through the shared client"""
    result = simplehttp.get(
        "https://httpbin.org/get",
        query_params=[("q", "python"), ("page", 1)],
        headers={"Accept": "application/json"},
        timeout=10000,
        headers_format="binary",
    )

    if result.ok:
        response = result.response
        print(f"{response.status} {response.status_line}")
        print(response.body[:200])
    else:
        # Transport failures come back as values
        print(f"Request failed: {result.error}")


# =============================================================================
# Example 2: Form POST
# =============================================================================

def form_post_example() -> None:
    """params are form-encoded into the body"""
    result = simplehttp.post(
        "https://httpbin.org/post",
        params={"name": "simplehttp", "version": "0.5.1"},
    )
    print(result.unwrap().status)


# =============================================================================
# Example 3: Named profile
# =============================================================================

def profile_example() -> None:
    """Send through a separately configured profile, then stop it"""
    result = simplehttp.get(
        "https://httpbin.org/cookies/set?flavour=oat",
        profile="no-cookies",
        cookies="disabled",
        max_sessions=2,
    )
    if result.ok:
        print(result.response.body)
        simplehttp.close(result.response)


# =============================================================================
# Example 4: Download to a file
# =============================================================================

def download_example() -> None:
    result = simplehttp.get("https://httpbin.org/bytes/1024", stream="./download.bin")
    if result.ok and result.response.saved_to_file:
        print("Saved to ./download.bin")


# =============================================================================
# Example 5: Configured client with debug output
# =============================================================================

def configured_client_example() -> None:
    """
    Load configuration from the environment and print every request

    export SIMPLEHTTP_TIMEOUT="15000"
    export SIMPLEHTTP_DEBUG="true"
    """
    logging.basicConfig(level=logging.INFO)
    config = ConfigLoader().load(env=True, config={"headers_format": "map"})

    with SimpleHttp(config) as client:
        result = client.head("https://httpbin.org/status/204")
        if result.ok:
            print(result.response.headers.get("content-length"))


# =============================================================================
# Example 6: Unknown options are rejected
# =============================================================================

def invalid_option_example() -> None:
    client = SimpleHttp(ClientConfig())
    try:
        client.get("https://httpbin.org/get", timout=1000)
    except InvalidArgumentsError as e:
        print(f"Rejected: {e.keys}")


# =============================================================================
# Run Examples
# =============================================================================

if __name__ == "__main__":
    print("=== SimpleHttp Examples ===\n")

    print("6. Unknown options:")
    invalid_option_example()
    print()

    print("1. GET:")
    get_example()
    print()

    print("3. Profiles:")
    profile_example()

    simplehttp.shutdown()
