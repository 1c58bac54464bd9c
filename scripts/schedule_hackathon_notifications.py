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
from services.hackathon_notifications import (
    clear_hackathon_notifications,
    get_hackathon_date,
    list_hackathon_notifications,
    schedule_hackathon_notifications,
)


parser = argparse.ArgumentParser(description='Schedule DevForge push notifications')
parser.add_argument('action', type=str, choices=['dry-run', 'schedule', 'list', 'clear'], help='action to perform')
args = parser.parse_args()

logger.info(f"Hackathon starts at {get_hackathon_date().isoformat()}")

if args.action == "dry-run":
    result = schedule_hackathon_notifications(dry_run=True)
    logger.info(f"{result['total']} notifications: {result['future']} future, {result['past']} past")
    for n in result["notifications"]:
        marker = "PAST" if n["isPast"] else "    "
        logger.info(f"{marker} {n['sendAt']}  {n['type']:<22} {n['title']}")
elif args.action == "schedule":
    result = schedule_hackathon_notifications()
    logger.info(f"Scheduled {result['scheduled']}, skipped {result['skipped']}, past {result['pastNotifications']}")
    for r in result["results"]:
        logger.info(f"  {r['type']}: {r['status']}")
elif args.action == "list":
    for n in list_hackathon_notifications():
        logger.info(f"{n.get('sendAt')}  {n['meta']['type']:<22} {n.get('status')}")
elif args.action == "clear":
    deleted = clear_hackathon_notifications()
    logger.info(f"Deleted {deleted} pending notifications")
