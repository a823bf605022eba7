# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db sementes.db
  python app.py camara criar --nome C1 --quadras 2 --lados 2 --filas 3 --andares 4
  python app.py produto cadastrar --nome Soja --lote L1 --quantidade 10 --peso-unitario-kg 25
  python app.py produto localizar-auto 1 --ator op1 --papel OPERATOR
  python app.py retirada solicitar 1 --tipo TOTAL
  python app.py retirada pendentes
  python app.py rel ocupacao
  python app.py importar lotes.xlsx
"""

from sementes.adapters.cli import main

if __name__ == "__main__":
    main()
