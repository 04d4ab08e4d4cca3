import re
import logging

from py_localmodel.document.store import DocumentStore
from py_localmodel.document.schema import SchemaTypes


logging.basicConfig(level=logging.DEBUG)

store = DocumentStore("./db", debug=True)

users = store.add_model("users", {
    "name": str,
    "age": {"type": SchemaTypes.NUMBER, "default": 18},
    "joined": {"type": SchemaTypes.DATE},
})

files = store.add_model("files", {
    "filename": str,
    "size": {"type": int},
    "owner": {"type": str, "ref": "users"},
})

ann = users.create({"name": "Ann", "age": 30, "joined": "2024-03-01T09:00:00"})
users.create({"name": "Bo", "age": 17})

report = files.create({"filename": "resume.pdf", "size": 12345, "owner": ann.id})

print(users.find({"age": {"$gte": 18}}))
print(users.find({"name": re.compile("^B")}))
print(users.count({"joined": {"$lt": "2025-01-01"}}))

report.populate("owner")
print(report.owner)
report.save()  # persists ann.id, not the joined document

store.close()
