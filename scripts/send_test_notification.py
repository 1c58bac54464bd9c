import argparse
import logging
import os
import sys
import requests
from dotenv import load_dotenv
sys.path.append("../")
load_dotenv()
# add logger
logger = logging.getLogger(__name__)
# set logger to standard out
logger.addHandler(logging.StreamHandler())
# set log level
logger.setLevel(logging.INFO)

TEST_PAYLOAD = {
    "title": "DevForge Hackathon Alert! 🚀",
    "body": "This is a test notification for DevForge - 12 Hour Hackathon on Dec 20, 2025. Get ready to build something amazing!",
    "icon": "/app-icon-192.png",
    "badge": "/app-icon-72.png",
    "tag": "devforge-test",
    "vibrate": [200, 100, 200, 100, 200],
    "data": {"url": "/hackathon", "type": "test"},
}

parser = argparse.ArgumentParser(description='Send a test push notification through the running API')
parser.add_argument('--base_url', type=str, default=os.getenv("API_BASE_URL", "http://localhost:6060"), help='API base url')
args = parser.parse_args()

secret = os.getenv("WEBPUSH_SEND_SECRET")
if not secret:
    logger.error("WEBPUSH_SEND_SECRET not found in environment variables")
    sys.exit(1)

url = f"{args.base_url}/api/webpush/send"
logger.info(f"Calling {url}")
response = requests.post(url, json={"payload": TEST_PAYLOAD}, headers={"x-webpush-secret": secret}, timeout=30)
if response.status_code != 200:
    logger.error(f"API error {response.status_code}: {response.text}")
    sys.exit(1)

results = response.json().get("results", [])
successful = len([r for r in results if r["success"]])
logger.info(f"Successful: {successful}, failed: {len(results) - successful}")
