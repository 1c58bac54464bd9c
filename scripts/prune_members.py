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
from api.members.members_service import prune_members


parser = argparse.ArgumentParser(description='Remove members that match no whitelist token and mail them a notice')
parser.add_argument('--whitelist', type=str, required=True,
                    help='file with one token per line, matched against name, username and email')
parser.add_argument('--no-email', action='store_true', help='skip removal emails')
parser.add_argument('--dry-run', action='store_true', help='only list who would be removed')
args = parser.parse_args()

with open(args.whitelist) as f:
    whitelist = [line.strip() for line in f if line.strip() and not line.startswith("#")]

result = prune_members(whitelist, send_emails=not args.no_email, dry_run=args.dry_run)
logger.info(f"Found {result['total']} members. Removing {len(result['removed'])} not in whitelist.")
for member in result["removed"]:
    logger.info(f"  {member.get('name') or 'Unknown'} ({member.get('email') or 'no-email'}) [{member['id']}]")
if args.dry_run:
    logger.info("Dry run, nothing deleted")
