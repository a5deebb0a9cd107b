"""
Greeting producer.

Run locally:
  uvicorn src.samples.greeting_producer:app --port 8080
"""

from fastapi import FastAPI
from pydantic import BaseModel

app = FastAPI(title="Greeting Producer", version="1.0.0")


class Greeting(BaseModel):
    greeting: str


@app.get("/greeting/{name}", response_model=Greeting)
async def greet(name: str) -> Greeting:
    return Greeting(greeting=f"Hello, {name}!")
