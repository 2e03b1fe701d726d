"""
Telecom Customer Care Assistant
===============================
A support console where an agent picks a customer and chats with an AI
assistant that answers from that customer's orders, incidents and invoices:
- SQLite store + repository for customer data
- LangGraph for the chat workflow
- OpenAI for text generation
- FastAPI for the HTTP API
"""
