"""
Script to record VCR cassettes with real HTTP interactions.

Run this once with real credentials to capture the login flow used by the
replay tests in tests/test_auth.py.
"""

import subprocess
import sys
from pathlib import Path


def check_credentials():
    """Check if credentials are available."""
    try:
        from fleetblock.config import LoginDetails

        settings = LoginDetails()
        return bool(settings.rcm_username and settings.rcm_password)
    except Exception:
        return False


def main():
    """Record VCR cassettes."""
    print("🎬 VCR CASSETTE RECORDING SCRIPT")
    print("=" * 40)

    if not check_credentials():
        print("❌ Missing credentials!")
        print("Please set up fleetblock/.env with:")
        print("   RCM_USERNAME=your_username")
        print("   RCM_PASSWORD=your_password")
        return 1

    print("✅ Credentials found")
    print("🔄 Recording real HTTP interactions...")
    print()

    cmd = [sys.executable, "-m", "pytest", "tests/test_auth.py", "-m", "live", "-v", "-s"]

    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as e:
        print(f"❌ Recording failed: {e}")
        return 1

    print()
    print("🎉 Recording completed!")

    cassettes = sorted(Path("tests/cassettes").glob("*.yaml"))
    if cassettes:
        print("📼 Created cassettes:")
        for cassette in cassettes:
            print(f"   - {cassette.name}")
    else:
        print("⚠️  No cassettes found")

    print()
    print("🧪 Now you can run replay tests:")
    print("   pytest tests/test_auth.py -v")
    return 0


if __name__ == "__main__":
    sys.exit(main())
