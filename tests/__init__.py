"""Test package for nexus-relay."""
import os

# pick up API keys for the live backend tests when a .env file is present
from dotenv import load_dotenv

dir = os.path.dirname(__file__)

max_step = 5
cur_step = 0
while not os.path.exists(os.path.join(dir, ".env")):
    dir = os.path.dirname(dir)
    cur_step += 1
    if dir == "/" or cur_step > max_step:
        break
else:
    load_dotenv(os.path.join(dir, ".env"))
