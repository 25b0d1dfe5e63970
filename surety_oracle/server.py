# surety_oracle/server.py
"""
FlightSurety Oracle — Status API
One route, constant payload. Shares nothing with the oracle loop.
"""
import sys

from fastapi import FastAPI
import uvicorn

from surety_oracle.config import API_HOST, API_PORT

API_MESSAGE = "An API for use with your Dapp!"

app = FastAPI(
    title="FlightSurety Oracle",
    description="Simulated flight status oracles for the FlightSurety dapp",
)


@app.get("/api")
def api():
    return {"message": API_MESSAGE}


if __name__ == "__main__":
    port = int(sys.argv[1]) if len(sys.argv) > 1 else API_PORT
    uvicorn.run(app, host=API_HOST, port=port)
