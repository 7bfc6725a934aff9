import logging
import os

from iprc import InlinePolicyReconciler, LocalPolicyService, PolicyDeclaration
from iprc.reader import EventuallyConsistentReader

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

# Clean up previous demo db if exists
if os.path.exists("demo.db"):
    os.remove("demo.db")

print("--- IPRC Live Demo ---")

# 1. Local identity service with half a second of replication lag
service = LocalPolicyService("demo.db", propagation_delay=0.5)
service.create_principal("alice")
reconciler = InlinePolicyReconciler(service, reader=EventuallyConsistentReader(service, timeout=10.0))
print("[+] Local identity service initialized with demo.db")

# 2. Create a binding with a generated name
policy = """
{
  "Version": "2012-10-17",
  "Statement": [{"Effect": "Allow", "Action": ["s3:GetObject"], "Resource": "*"}]
}
"""
state = reconciler.apply(PolicyDeclaration("alice", policy, name_prefix="read-"))
print(f"[+] Created binding: {state.id}")
print(f"[+] Stored policy: {state.policy}")

# 3. Re-read: formatting differences do not count as drift
refreshed = reconciler.read(state.id, declared_policy=state.policy)
print(f"[+] Stored text kept after refresh: {refreshed.policy == state.policy}")

# 4. Out-of-band change is surfaced
service.put_inline_policy("alice", state.policy_name, '{"Version":"2012-10-17","Statement":[]}')
drifted = reconciler.read(state.id, declared_policy=state.policy)
print(f"[+] Drift detected: {drifted.policy}")

# 5. Delete twice; the second delete is a no-op
reconciler.delete(state.id)
reconciler.delete(state.id)
print(f"[+] Read after delete: {reconciler.read(state.id, declared_policy=policy)}")

service.close()
if os.path.exists("demo.db"):
    os.remove("demo.db")
print("--- Demo Complete ---")
