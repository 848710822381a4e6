# api/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from api.routes import books

app = FastAPI(title="Bookshelf")

# CORS configuration
origins = [
    "http://localhost:5173",
    "http://localhost:4173",
    "http://localhost",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(books.router)

@app.get("/")
async def root():
    return {"message": "Bookshelf API"}
