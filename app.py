import logging
import os
from dotenv import load_dotenv

from src.app.app import create_app

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = create_app()

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    print("🚀 Starting Campus Waitlist API...")
    print(f"🔌 API will be available at: http://localhost:{port}")
    print(f"📚 API Documentation at: http://localhost:{port}/api/docs")
    print(f"❤️ Health: http://localhost:{port}/api/health")
    print("👨‍💼 Admin dashboard: streamlit run src/app/dashboard/main.py")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        log_level="info"
    )
