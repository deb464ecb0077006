from topicpilot import AssistantConfig, TopicPilotApp, TopicTree
from topicpilot.tree import resolve

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

# --------------------------------
# Sample topic tree
# --------------------------------

tree = TopicTree()

tree.publish("home/bedroom/lamp", "OFF", retained=True)
tree.publish("home/bedroom/lamp", "ON", retained=True)
tree.publish("home/bedroom/sensor", {"temperature": 22.5, "humidity": 41})
tree.publish("home/kitchen/fridge/door", "closed")
tree.publish("home/kitchen/fridge/temperature", "4.1")
tree.publish("zigbee2mqtt/bridge/state", {"state": "online"}, retained=True)

# --------------------------------
# Create session (backend from LLM_PROVIDER / *_API_KEY)
# --------------------------------

session = TopicPilotApp.create(AssistantConfig.from_env())

focus = resolve("home/bedroom/lamp", tree.root)

# --------------------------------
# Interactive loop
# --------------------------------

print("\nTopicPilot ready. Focus: home/bedroom/lamp. Type 'exit' to quit.\n")

while True:
    try:
        q = input("You: ").strip()
    except (EOFError, KeyboardInterrupt):
        break

    if not q:
        continue
    if q.lower() in {"exit", "quit"}:
        break
    if q.lower() == "clear":
        session.clear_history()
        continue

    result = session.send_turn(q, focus)

    print("\nAssistant:", result.final_text)
    print(f"({result.outcome.value}, rounds={result.rounds_used}, tools={result.invocations_used})\n")
