"""
SQL报表命令行工具
管理配置数据库中的数据库连接，并在命令行渲染报表
"""
import argparse
import getpass
import sys
from typing import Dict, List, Optional

from .database import init_database
from .models.database_config import ConnectionConfig
from .services.connection_registry import save_connection
from .services.database_adapters import DatabaseAdapterFactory
from .services.encryption_service import get_encryption_service
from .services.exceptions import ReportError
from .services.report_service import get_report_service
from .utils.logger import setup_logger


def parse_macros(pairs: Optional[List[str]]) -> Dict[str, str]:
    """
    解析 key=value 形式的宏变量

    Raises:
        ValueError: 如果参数不是 key=value 形式
    """
    macros = {}
    for pair in pairs or []:
        key, sep, value = pair.partition('=')
        if not sep or not key.strip():
            raise ValueError(f"宏变量格式错误（应为 key=value）: {pair}")
        macros[key.strip()] = value
    return macros


def cmd_init_db(args) -> int:
    init_database()
    print("✓ 配置数据库初始化完成")
    return 0


def cmd_add_connection(args) -> int:
    password = args.password
    if args.ask_password:
        password = getpass.getpass("密码: ")

    database = init_database()
    try:
        connection_id = save_connection(
            database,
            get_encryption_service(),
            name=args.name,
            db_type=args.type,
            url=args.url,
            username=args.username,
            password=password,
        )
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    print(f"✓ 已添加数据库连接: {args.name} ({connection_id})")
    return 0


def cmd_list_connections(args) -> int:
    database = init_database()
    with database.get_session() as session:
        configs = session.query(ConnectionConfig).order_by(
            ConnectionConfig.position,
            ConnectionConfig.created_at
        ).all()
        rows = [(c.name, c.type, c.url, c.username or "") for c in configs]

    if not rows:
        print("没有配置数据库连接")
        return 0

    for name, db_type, url, username in rows:
        print(f"{name}\t{db_type}\t{url}\t{username}")
    return 0


def cmd_render(args) -> int:
    try:
        macros = parse_macros(args.macro)
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2

    try:
        html = get_report_service().render_page(args.identifier, macros, args.database)
    except ReportError as e:
        print(f"✗ 报表渲染失败: {e.message}", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(html)
        print(f"✓ 报表已保存到: {args.output}")
    else:
        sys.stdout.write(html)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sqlreports',
        description='SQL报表工具 - 由带头部注释的查询文件生成HTML报表',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  # 初始化配置数据库
  sqlreports init-db

  # 添加数据库连接
  sqlreports add-connection main sqlite ./data/sales.db
  sqlreports add-connection warehouse mysql localhost:3306/dw -u report --ask-password

  # 渲染报表
  sqlreports render sales/monthly.sql -m start=2024-01-01 -m end=2024-02-01 -o monthly.html
        """
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    init_parser = subparsers.add_parser('init-db', help='初始化配置数据库')
    init_parser.set_defaults(func=cmd_init_db)

    add_parser = subparsers.add_parser('add-connection', help='添加数据库连接')
    add_parser.add_argument('name', help='连接名称')
    add_parser.add_argument('type', choices=DatabaseAdapterFactory.get_supported_types(),
                            help='数据库类型')
    add_parser.add_argument('url', help='连接地址（host:port/dbname，SQLite为文件路径）')
    add_parser.add_argument('-u', '--username', help='用户名')
    add_parser.add_argument('-p', '--password', help='密码')
    add_parser.add_argument('--ask-password', action='store_true', help='交互输入密码')
    add_parser.set_defaults(func=cmd_add_connection)

    list_parser = subparsers.add_parser('list-connections', help='列出数据库连接')
    list_parser.set_defaults(func=cmd_list_connections)

    render_parser = subparsers.add_parser('render', help='渲染报表')
    render_parser.add_argument('identifier', help='报表标识（相对报表目录的路径）')
    render_parser.add_argument('-m', '--macro', action='append', metavar='KEY=VALUE',
                               help='宏变量，可重复')
    render_parser.add_argument('--database', help='数据库连接名称')
    render_parser.add_argument('-o', '--output', help='输出HTML文件路径（默认输出到标准输出）')
    render_parser.set_defaults(func=cmd_render)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger()
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
