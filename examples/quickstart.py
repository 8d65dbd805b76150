"""Quick start example for the GenAPI Python SDK."""

import time

from genapi import GenApi

client = GenApi.from_env()  # reads GENAPI_API_KEY

# Current user
print("Me:", client.get_me())

# Create a task and poll until it finishes
task = client.create_network_task("gpt-4o", {"messages": [{"role": "user", "content": "Hello!"}]})
while True:
    status = client.get_request(task["request_id"])
    if status.get("status") != "processing":
        break
    time.sleep(1)
print("Result:", status)
