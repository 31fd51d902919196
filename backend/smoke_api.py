import requests

BASE = "http://localhost:8000"

# Free text -> keys -> recipe -> optimized recipe against a running server
print("=== NORMALIZE ===")
r = requests.post(f"{BASE}/normalize", json={"text": "2 cups rice, chicken, spinach, garlic, no onion, high protein"}, timeout=30)
parsed = r.json()
print(f"Status: {r.status_code}")
print(f"Ingredients: {parsed.get('ingredients')}")
print(f"Excluded: {parsed.get('excluded')}  Unknown: {parsed.get('unknown')}")
print(f"Signals: {parsed.get('signals')}")

print("\n=== GENERATE ===")
context = {
    "ingredients": parsed.get("ingredients", []),
    "excluded": parsed.get("excluded", []),
    "signals": parsed.get("signals", {}),
    "location": "India",
    "servings": 2,
}
r = requests.post(f"{BASE}/generate", json=context, timeout=30)
d = r.json()
print(f"Status: {r.status_code}")
print(f"Title: {d.get('title')}")
print(f"Score: {d.get('health', {}).get('score')} ({d.get('health', {}).get('category')})")
print(f"Cost: {d.get('cost', {}).get('formatted_total')}/serving, tier {d.get('cost', {}).get('budget_tier')}")
for step in d.get("steps", []):
    print(f"  {step[:90]}")

print("\n=== OPTIMIZE (ceiling 20) ===")
r = requests.post(f"{BASE}/optimize", json={**context, "max_cost_per_serving": 20}, timeout=30)
d = r.json()
print(f"Status: {r.status_code}")
for change in d.get("optimization_changes", []):
    print(f"  {change['original']} -> {change['swapped_to']} ({change['saving_pct']}%): {change['reason'][:60]}")
print(f"Cost: {d.get('cost_before')} -> {d.get('cost_after')} ({d.get('cost_saving_pct')}% saved)")
print(f"Score: {d.get('score_before')} -> {d.get('score_after')}")

print("\n=== EMPTY RESULT ===")
r = requests.post(f"{BASE}/generate", json={"ingredients": ["milk"], "dietary": "vegan"}, timeout=30)
print(f"Status: {r.status_code} -> {r.json().get('detail')}")
