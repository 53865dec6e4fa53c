# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db padaria.db
  python app.py importar clientes clientes.xlsx
  python app.py importar entregas entregas.xlsx
  python app.py importar precos precos.xlsx
  python app.py giro --referencia 2025-03-10
  python app.py dre
  python app.py producao --capacidade-forma 40
"""

from padaria.adapters.cli import main

if __name__ == "__main__":
    main()
