import argparse
import logging
import sys
from dotenv import load_dotenv
sys.path.append("../")
load_dotenv()
# add logger
logger = logging.getLogger(__name__)
# set logger to standard out
logger.addHandler(logging.StreamHandler())
# set log level
logger.setLevel(logging.INFO)
#
from api.members.members_service import regenerate_all_credentials


parser = argparse.ArgumentParser(description='Regenerate every member\'s login and email it to them')
parser.add_argument('--no-email', action='store_true', help='update credentials without sending emails')
args = parser.parse_args()

result = regenerate_all_credentials(send_emails=not args.no_email)
logger.info(result["message"])
if result["ok"]:
    logger.info(f"Emails sent: {result['emailsSent']}, failed: {result['emailsFailed']}")
