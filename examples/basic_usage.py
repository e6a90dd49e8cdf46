"""Example: basic usage of task-records."""

from task_records import RecordNotFoundError, RecordStore

store = RecordStore()

# Create some records
for i in range(12):
    store.create(f"Task {i}", f"Description of task {i}")

# Mark one done, delete another
store.update(3, is_completed=True)
store.delete(5)

# Page through everything in creation order
page = 1
while True:
    records = store.list(page, 5)
    if not records:
        break
    print(f"Page {page}:")
    for record in records:
        mark = "x" if record.is_completed else " "
        print(f"  [{mark}] {record.name}")
    page += 1

try:
    store.get(5)
except RecordNotFoundError as exc:
    print(f"Deleted record is gone: {exc} (kind={exc.kind.value})")
