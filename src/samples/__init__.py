"""
Greeting sample services.

A producer that greets by name and a consumer that calls it. The contract
between them lives in contracts/greeting-producer/.
"""
